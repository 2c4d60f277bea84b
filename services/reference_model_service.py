from sqlalchemy import func
from sqlalchemy.orm import Session

from models import Document, Artifact, GlossaryTerm
from reference_model.json_encoder import build_document


class ReferenceModelService:
    def __init__(self, session: Session):
        self.session = session

    def store(self, model):
        """
        Replaces the stored reference model with a pipeline result.

        `model` is the value of a successful TransformResult:
        {'reference_model': {'metadata': ..., 'artifacts': [...]}, 'glossary': {...}}
        """
        reference_model = model['reference_model']
        metadata = reference_model['metadata']

        self.session.query(Artifact).delete()
        self.session.query(GlossaryTerm).delete()
        self.session.query(Document).delete()

        self.session.add(Document(
            id=1,
            title=metadata.get('title'),
            version=metadata.get('version'),
            version_date=metadata.get('version_date'),
            generated_at=metadata.get('_generation_timestamp'),
        ))

        for position, record in enumerate(reference_model['artifacts']):
            record = dict(record)
            embedding = record.pop('embeddings', None)
            self.session.add(Artifact(position=position, record=record, embedding=embedding))

        for position, (term, definition) in enumerate(model['glossary'].items()):
            self.session.add(GlossaryTerm(term=term, definition=definition, position=position))

        self.session.commit()

    def get_metadata(self):
        """Fetches the document metadata, or None if nothing is loaded."""
        doc = self.session.get(Document, 1)
        return doc.to_metadata() if doc else None

    def get_artifacts(self, section=None):
        """Returns all artifact records in sheet order, optionally only those with a section."""
        artifacts = self.session.query(Artifact).order_by(Artifact.position).all()
        records = [a.to_dict() for a in artifacts]
        if section:
            records = [r for r in records if isinstance(r.get(section), dict)]
        return records

    def get_artifact(self, position):
        artifact = self.session.get(Artifact, position)
        return artifact.to_dict() if artifact else None

    def get_glossary(self):
        terms = self.session.query(GlossaryTerm).order_by(GlossaryTerm.position).all()
        return {t.term: t.definition for t in terms}

    def lookup_term(self, term):
        """Case-insensitive glossary lookup."""
        entry = (
            self.session.query(GlossaryTerm)
            .filter(func.lower(GlossaryTerm.term) == term.strip().lower())
            .first()
        )
        return {'term': entry.term, 'definition': entry.definition} if entry else None

    def export_document(self):
        """Returns the stored model in the same shape as the JSON output."""
        model = {
            'reference_model': {
                'metadata': self.get_metadata(),
                'artifacts': self.get_artifacts(),
            },
            'glossary': self.get_glossary(),
        }
        return build_document(model)
