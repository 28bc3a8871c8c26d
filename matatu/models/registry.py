# import every model so Base.metadata knows all tables (create_all, alembic)
from matatu.models.user import User  # noqa: F401
from matatu.models.refresh_token import RefreshToken  # noqa: F401
from matatu.models.transit import Stage, Route, Sacco  # noqa: F401
from matatu.models.alert import DriverAlert  # noqa: F401
from matatu.models.rating import Rating  # noqa: F401
from matatu.models.lost_item import LostItem  # noqa: F401
