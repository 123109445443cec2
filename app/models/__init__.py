# Campus Gate Access — Database Models
# Import all models here for SQLAlchemy discovery

from app.models.student import Student           # noqa
from app.models.vehicle import Vehicle           # noqa
from app.models.access_log import AccessLog      # noqa
from app.models.alert import Alert               # noqa
