import os
import dotenv
dotenv.load_dotenv()
basedir = os.path.abspath(os.path.dirname(__file__))

# Flask configuration
SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-key-please-change-in-production'
DEBUG = os.environ.get('FLASK_DEBUG', '0') == '1'
ENVIRONMENT = os.environ.get('ENVIRONMENT', 'development')
LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

# Uploaded timetable pages
MAX_CONTENT_LENGTH = 10 * 1024 * 1024

# Database configuration
if os.environ.get('DATABASE_URL'):
    SQLALCHEMY_DATABASE_URI = os.environ['DATABASE_URL']
elif os.environ.get('VERCEL'):
    # Vercel filesystem is read-only, use ephemeral /tmp
    SQLALCHEMY_DATABASE_URI = 'sqlite:////tmp/horarios.db'
else:
    SQLALCHEMY_DATABASE_URI = 'sqlite:///' + os.path.join(basedir, 'horarios.db')
SQLALCHEMY_TRACK_MODIFICATIONS = False

# Schedule generator defaults (requests may override them)
GENERATOR_MIN_START_HOUR = int(os.environ.get('GENERATOR_MIN_START_HOUR', 6))
GENERATOR_MAX_COMBINATIONS = int(os.environ.get('GENERATOR_MAX_COMBINATIONS', 10000))
GENERATOR_TIME_BUDGET_MS = int(os.environ.get('GENERATOR_TIME_BUDGET_MS', 5000))
GENERATOR_TOP_K = int(os.environ.get('GENERATOR_TOP_K', 10))
