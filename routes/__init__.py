from .main import main_bp
from .catalog import catalog_bp
from .schedules import schedules_bp
from .upload import upload_bp

__all__ = ['main_bp', 'catalog_bp', 'schedules_bp', 'upload_bp']
