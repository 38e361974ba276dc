from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_cors import CORS
from flask_caching import Cache
from flask_wtf.csrf import CSRFProtect

# Singletons (initialized in app factory)
db = SQLAlchemy()
migrate = Migrate()
cors = CORS()
cache = Cache()
csrf = CSRFProtect()
