from .database import Base, Document, Artifact, GlossaryTerm, get_engine, get_session_factory

__all__ = ['Base', 'Document', 'Artifact', 'GlossaryTerm', 'get_engine', 'get_session_factory']
