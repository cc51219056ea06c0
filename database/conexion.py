from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from config import DATABASE_URL

# Engine sincrónico, driver psycopg2 para URLs postgresql://
engine = create_engine(DATABASE_URL, pool_pre_ping=True)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

# Las tablas se crean desde main.py después de importar los modelos.


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
