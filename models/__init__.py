"""
Instantiates the DBStorage singleton shared by models and blueprints.
"""
from models.db_storage import DBStorage

storage = DBStorage()
storage.reload()
