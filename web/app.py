"""
Web Interface for Matrix Layout Reconstruction
"""

import logging
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from flask import Flask, request, jsonify
from matrix_layout.config import Settings
from matrix_layout.errors import InvalidInputError
from matrix_layout.flex_tree import iter_leaf_guids, layout_children, to_flex_tree
from matrix_layout.nodes import nodes_from_dicts

settings = Settings.from_env()
logging.basicConfig(level=getattr(logging, settings.log_level, logging.INFO))
logger = logging.getLogger(__name__)

app = Flask(__name__)
app.config['MAX_CHILDREN'] = settings.max_children


@app.route('/health')
def health():
    return jsonify({'status': 'ok'})


@app.route('/layout', methods=['POST'])
def layout():
    """Reconstruct the row/column tree of one container's children."""
    try:
        payload = request.get_json(silent=True)
        if not isinstance(payload, dict) or 'children' not in payload:
            return jsonify({'error': "Request body must be a JSON object with a 'children' list"}), 400

        nodes = nodes_from_dicts(payload['children'])
        if len(nodes) > app.config['MAX_CHILDREN']:
            return jsonify({
                'error': f"At most {app.config['MAX_CHILDREN']} children are accepted, got {len(nodes)}"
            }), 400

        logger.info(f"Laying out {len(nodes)} children")
        children_matrix = layout_children(nodes)

        return jsonify({
            'size': children_matrix.n,
            'tree': to_flex_tree(children_matrix),
            'guids': list(iter_leaf_guids(children_matrix)),
        })
    except InvalidInputError as e:
        logger.info(f"Rejected layout request: {str(e)}")
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        logger.error(f"Error laying out children: {str(e)}", exc_info=True)
        return jsonify({'error': str(e)}), 500


if __name__ == '__main__':
    app.run(host=settings.host, port=settings.port)
