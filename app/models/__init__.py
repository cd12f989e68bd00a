# Vehicle Permit Tracker — Database Models
# Import all models here for SQLAlchemy discovery

from app.models.user import User                       # noqa
from app.models.vehicle import Vehicle                 # noqa
from app.models.vehicle_share import VehicleShare      # noqa
from app.models.share_request import ShareRequest      # noqa
from app.models.vehicle_log import MaintenanceLog, FuelLog, MileageLog  # noqa
from app.models.system_config import SystemConfig      # noqa
