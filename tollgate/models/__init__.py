# Tollgate: Database Models
# Import all models here for SQLAlchemy discovery

from tollgate.models.toll_transaction import TollTransaction   # noqa
from tollgate.models.toll_error import TollError               # noqa
