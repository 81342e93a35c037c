from __future__ import annotations
from datetime import datetime, timezone
import logging
import threading

from flask import Flask, request, jsonify, Response
from werkzeug.exceptions import HTTPException, MethodNotAllowed, NotFound

from companysearch import __version__
from companysearch.catalog import CatalogUnavailable, CompanyCatalog, open_catalog
from companysearch.config.env import configure_logging, get_catalog_config, get_server_config, load_env
from companysearch.matcher.core import RESULT_LIMIT, build_response, search

logger = logging.getLogger(__name__)

app = Flask(__name__)
app.json.ensure_ascii = False

RANDOM_DEFAULT = 10

_CORS_HEADERS = {
    'Access-Control-Allow-Origin': '*',
    'Access-Control-Allow-Methods': 'GET, POST, OPTIONS',
    'Access-Control-Allow-Headers': 'Content-Type',
}

_catalog: CompanyCatalog | None = None
_catalog_lock = threading.Lock()


def _get_catalog() -> CompanyCatalog:
    # Tests inject a catalog through app.config; otherwise build one from env once
    global _catalog
    injected = app.config.get('CATALOG')
    if injected is not None:
        return injected
    with _catalog_lock:
        if _catalog is None:
            _catalog = open_catalog(get_catalog_config())
        return _catalog


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec='seconds')


def _error(message: str, status: int):
    return jsonify({'error': message}), status


@app.before_request
def _preflight():
    if request.method == 'OPTIONS':
        return Response(status=200)
    if request.method not in ('GET', 'HEAD'):
        return _error('Method not allowed', 405)
    return None


@app.after_request
def _cors(resp: Response):
    for k, v in _CORS_HEADERS.items():
        resp.headers[k] = v
    return resp


@app.errorhandler(NotFound)
def _not_found(_e):
    return _error('Route not found', 404)


@app.errorhandler(MethodNotAllowed)
def _method_not_allowed(_e):
    return _error('Method not allowed', 405)


@app.errorhandler(HTTPException)
def _http_error(e: HTTPException):
    return _error(e.description or e.name, e.code or 500)


@app.get('/')
def health():
    return jsonify({
        'status': 'ok',
        'message': 'Business Search API',
        'version': __version__,
        'timestamp': _now(),
    })


@app.get('/api/search')
def api_search():
    query = (request.args.get('q') or '').strip()
    if not query:
        return jsonify(build_response('', []))
    try:
        results = search(query, _get_catalog())
    except CatalogUnavailable as e:
        logger.error("Search failed for %r: %s", query, e)
        return _error(f'Search failed: {e}', 500)
    return jsonify(build_response(query, results))


@app.get('/api/stats')
def api_stats():
    try:
        total = _get_catalog().count()
    except CatalogUnavailable as e:
        logger.error("Stats failed: %s", e)
        return _error(f'Failed to fetch stats: {e}', 500)
    return jsonify({
        'total_companies': int(total),
        'database': 'connected',
        'timestamp': _now(),
    })


@app.get('/api/random')
def api_random():
    limit = request.args.get('limit', default=RANDOM_DEFAULT, type=int)
    limit = max(1, min(limit, RESULT_LIMIT))
    try:
        picks = _get_catalog().sample(limit)
    except CatalogUnavailable as e:
        logger.error("Random sample failed: %s", e)
        return _error(f'Failed to fetch random companies: {e}', 500)
    body = build_response('', picks)
    body.pop('query')
    return jsonify(body)


def main():
    load_env()
    cfg = get_server_config()
    configure_logging(cfg.log_level)
    logger.info("Business Search API %s listening on %s:%d", __version__, cfg.host, cfg.port)
    app.run(host=cfg.host, port=cfg.port)


if __name__ == '__main__':
    main()
