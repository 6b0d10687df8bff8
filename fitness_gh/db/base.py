from sqlalchemy.orm import declarative_base

Base = declarative_base()

# Models import Base from here; fitness_gh.db.models registers them all
