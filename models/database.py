import json

from sqlalchemy import create_engine, Column, String, Integer, JSON, Text
from sqlalchemy.orm import declarative_base, sessionmaker

from reference_model.config import DEFAULT_DB_URL
from reference_model.json_encoder import json_default

Base = declarative_base()


class Document(Base):
    __tablename__ = 'documents'

    id = Column(Integer, primary_key=True)
    title = Column(String)
    version = Column(String, index=True)
    version_date = Column(String)
    generated_at = Column(String)

    def to_metadata(self):
        """Returns the metadata block in the same shape as the JSON output."""
        return {
            '_generation_timestamp': self.generated_at,
            'title': self.title,
            'version': self.version,
            'version_date': self.version_date,
        }


class Artifact(Base):
    __tablename__ = 'artifacts'

    # Row order within the artifact sheet
    position = Column(Integer, primary_key=True)

    # The full nested record as produced by build_record
    record = Column(JSON)
    embedding = Column(JSON, nullable=True)

    def to_dict(self):
        data = dict(self.record or {})
        if self.embedding is not None:
            data['embeddings'] = self.embedding
        return data


class GlossaryTerm(Base):
    __tablename__ = 'glossary'

    term = Column(String, primary_key=True)
    definition = Column(Text)

    # Row order within the glossary sheet
    position = Column(Integer, index=True)


def dumps_record(value):
    return json.dumps(value, default=json_default)


def get_engine(db_url=DEFAULT_DB_URL, **kwargs):
    # Records may hold date cells; store them the way the JSON output renders them
    kwargs.setdefault('json_serializer', dumps_record)
    return create_engine(db_url, **kwargs)


def get_session_factory(engine):
    return sessionmaker(bind=engine)
