"""Simple Flask web interface for the Salesforce object reference."""

import os
import re
from pathlib import Path
from flask import Flask, request, jsonify

# Add parent directory to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from sf_reference.config import DATA_DIR_ENV
from sf_reference.reader import LocalStorage, TieredReader


def create_app(reader: TieredReader | None = None) -> Flask:
    """Build the app around a reader (defaults to $SF_REFERENCE_DATA_DIR)."""
    app = Flask(__name__)

    if reader is None:
        data_dir = os.environ.get(DATA_DIR_ENV, str(Path(__file__).parent.parent / 'doc'))
        reader = TieredReader(LocalStorage(data_dir))
    app.config['READER'] = reader

    @app.route('/api/clouds')
    def list_clouds():
        """List clouds with their object counts."""
        return jsonify([
            {'cloud': cloud, 'objectCount': reader.get_cloud_listing(cloud).object_count}
            for cloud in reader.list_clouds()
        ])

    @app.route('/api/clouds/<path:cloud>')
    def get_cloud(cloud: str):
        """Objects of one cloud; ?full=1 returns full records."""
        listing = reader.get_cloud_listing(cloud)
        if not listing.objects:
            return jsonify({'error': 'Cloud not found', 'cloud': cloud}), 404
        if request.args.get('full') in ('1', 'true'):
            return jsonify([r.to_dict() for r in reader.get_objects_in_cloud(cloud)])
        return jsonify({**listing.to_dict(), 'descriptions': reader.get_descriptions_by_cloud(listing.cloud)})

    @app.route('/api/objects/<name>')
    def get_object(name: str):
        """One object; ?cloud= reports it under that cloud."""
        record = reader.get_object(name, cloud=request.args.get('cloud'))
        if record is None:
            return jsonify({'error': 'Object not found', 'name': name}), 404
        return jsonify(record.to_dict())

    @app.route('/api/search')
    def search():
        """Search by name (default) or description (?in=description)."""
        query = request.args.get('q')
        if not query:
            return jsonify({'error': 'No query provided'}), 400
        try:
            if request.args.get('in') == 'description':
                return jsonify(reader.search_by_description(query))
            return jsonify(reader.search_by_name(query))
        except re.error as e:
            return jsonify({'error': f'Invalid pattern: {e}'}), 400

    @app.route('/api/cache/invalidate', methods=['POST'])
    def invalidate_cache():
        """Reload data from disk on the next request."""
        reader.invalidate()
        return jsonify({'status': 'ok'})

    return app


if __name__ == '__main__':
    create_app().run(debug=True, port=5002)
