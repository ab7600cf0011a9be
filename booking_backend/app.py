# module booking_backend.app
from booking_backend.app_setup.factory import create_app

# App globale
app = create_app()
