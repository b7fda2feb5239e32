"""
Table metadata shared by all persisted entity shapes.
"""
from sqlalchemy import MetaData

metadata = MetaData()
