from typing import Optional

from models.Client import Client
from models.Table import Table
from models.TableReservation import TableReservation

class TableReservationDetail(TableReservation):
    table: Optional[Table] = None
    client: Optional[Client] = None
