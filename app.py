from flask import Flask, request, jsonify, g
from models import Base, get_engine, get_session_factory
from reference_model.config import load_settings
from services import ReferenceModelService


def create_app(engine=None):
    app = Flask(__name__)
    app.json.sort_keys = False

    # Initialize DB connection factory
    if engine is None:
        engine = get_engine(load_settings().db_url)
    Base.metadata.create_all(engine)
    SessionLocal = get_session_factory(engine)

    # Request Context Config
    @app.before_request
    def get_db():
        if 'db' not in g:
            g.db = SessionLocal()

    @app.teardown_request
    def close_db(e=None):
        db = g.pop('db', None)
        if db is not None:
            db.close()

    def get_service():
        return ReferenceModelService(g.db)

    def not_found(message):
        return jsonify({'error': message}), 404

    @app.route('/api/metadata')
    def api_metadata():
        metadata = get_service().get_metadata()
        if metadata is None:
            return not_found('No reference model loaded')
        return jsonify(metadata)

    @app.route('/api/artifacts')
    def api_artifacts():
        section = request.args.get('section', '').strip() or None
        items = get_service().get_artifacts(section=section)
        return jsonify({'_count': len(items), 'items': items})

    @app.route('/api/artifacts/<int:position>')
    def api_artifact(position):
        artifact = get_service().get_artifact(position)
        if artifact is None:
            return not_found(f'No artifact at position {position}')
        return jsonify(artifact)

    @app.route('/api/glossary')
    def api_glossary():
        return jsonify(get_service().get_glossary())

    @app.route('/api/glossary/<path:term>')
    def api_glossary_term(term):
        entry = get_service().lookup_term(term)
        if entry is None:
            return not_found(f'Unknown glossary term: {term}')
        return jsonify(entry)

    @app.route('/api/export')
    def api_export():
        return jsonify(get_service().export_document())

    return app


app = create_app()

if __name__ == '__main__':
    app.run(debug=True, port=5000)
