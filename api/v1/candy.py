# api/v1/candy.py

import asyncio
from functools import partial

from quart import Blueprint, request, jsonify, Response

from models import CandyType
from orchestration.watermark import download_filename, watermark_data_uri


def create_candy_blueprint(candy_generation_orchestrator, watermark_text, logger):
    """
    Factory function to create the candy API blueprint with dependency injection.
    """
    bp = Blueprint('candy_api', __name__, url_prefix='/api/v1/candy')

    @bp.route('/types', methods=['GET'])
    async def get_candy_types():
        return jsonify({'types': [candy_type.value for candy_type in CandyType]})

    @bp.route('/generate', methods=['POST'])
    async def generate_candy():
        """
        Expects JSON: {"keywords": str, "candyType": str}
        Returns {"name": str, "imageUrl": "data:image/png;base64,..."}
        """
        data = await request.get_json(silent=True)
        if data is None:
            return jsonify({'error': 'Request must be JSON'}), 400

        result, status = await candy_generation_orchestrator.generate(data)
        return jsonify(result), status

    @bp.route('/download', methods=['POST'])
    async def download_candy():
        """
        Expects JSON: {"name": str, "imageUrl": "data:image/...;base64,..."}
        Returns the image as a watermarked PNG attachment.
        """
        data = await request.get_json(silent=True)
        if not isinstance(data, dict):
            return jsonify({'error': 'Request must be JSON'}), 400

        # Pillow work is CPU-bound; keep it off the event loop
        loop = asyncio.get_running_loop()
        try:
            png_bytes = await loop.run_in_executor(
                None, partial(watermark_data_uri, data.get('imageUrl', ''), watermark_text)
            )
        except ValueError as e:
            logger.warning(f"Rejected candy download: {str(e)}")
            return jsonify({'error': str(e)}), 400

        filename = download_filename(data.get('name', ''))
        logger.info(f"Serving watermarked candy download: {filename}")
        return Response(
            png_bytes,
            mimetype='image/png',
            headers={'Content-Disposition': f'attachment; filename="{filename}"'},
        )

    return bp
