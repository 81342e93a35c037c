import unittest
from pathlib import Path

from companysearch.api.server import app
from companysearch.catalog import CatalogUnavailable, MemoryCompanyCatalog

FIXTURE = Path(__file__).parent / "fixtures" / "companies.json"


class UnavailableCatalog:
    supports_full_text = True

    def __init__(self):
        self.calls = 0

    def _fail(self, *args):
        self.calls += 1
        raise CatalogUnavailable("could not connect to server")

    exact_match = prefix_match = substring_match = similarity_match = full_text_match = _fail
    count = sample = _fail


class TestSearchAPI(unittest.TestCase):
    def setUp(self):
        app.testing = True
        app.config['CATALOG'] = MemoryCompanyCatalog.from_json_path(FIXTURE)
        self.client = app.test_client()

    def tearDown(self):
        app.config.pop('CATALOG', None)

    def test_health(self):
        rv = self.client.get('/')
        self.assertEqual(rv.status_code, 200)
        body = rv.get_json()
        self.assertEqual(body['status'], 'ok')
        self.assertIn('version', body)
        self.assertIn('timestamp', body)

    def test_search_contract(self):
        rv = self.client.get('/api/search', query_string={'q': '  acme '})
        self.assertEqual(rv.status_code, 200)
        body = rv.get_json()
        self.assertEqual(body['query'], 'acme')
        self.assertEqual(body['count'], len(body['results']))
        self.assertEqual(body['results'][0], {'company_name': 'Acme Corp', 'website': 'acme.com'})
        self.assertEqual(body['results'][1]['company_name'], 'Acme Industries')

    def test_empty_query_does_not_touch_catalog(self):
        failing = UnavailableCatalog()
        app.config['CATALOG'] = failing
        for qs in ({}, {'q': ''}, {'q': '   '}):
            rv = self.client.get('/api/search', query_string=qs)
            self.assertEqual(rv.status_code, 200)
            self.assertEqual(rv.get_json(), {'results': [], 'count': 0, 'query': ''})
        self.assertEqual(failing.calls, 0)

    def test_catalog_unavailable(self):
        failing = UnavailableCatalog()
        app.config['CATALOG'] = failing
        rv = self.client.get('/api/search?q=acme')
        self.assertEqual(rv.status_code, 500)
        self.assertEqual(rv.get_json(), {'error': 'Search failed: could not connect to server'})
        self.assertEqual(failing.calls, 1)

    def test_unicode_not_escaped(self):
        rv = self.client.get('/api/search', query_string={'q': 'café'})
        self.assertIn('Café Noir', rv.get_data(as_text=True))

    def test_stats(self):
        rv = self.client.get('/api/stats')
        self.assertEqual(rv.status_code, 200)
        body = rv.get_json()
        self.assertEqual(body['total_companies'], 6)
        self.assertEqual(body['database'], 'connected')
        app.config['CATALOG'] = UnavailableCatalog()
        rv2 = self.client.get('/api/stats')
        self.assertEqual(rv2.status_code, 500)
        self.assertTrue(rv2.get_json()['error'].startswith('Failed to fetch stats:'))

    def test_random(self):
        rv = self.client.get('/api/random?limit=2')
        self.assertEqual(rv.status_code, 200)
        body = rv.get_json()
        self.assertEqual(body['count'], 2)
        self.assertNotIn('query', body)
        rv_all = self.client.get('/api/random?limit=500')
        self.assertEqual(rv_all.get_json()['count'], 6)


class TestTransport(unittest.TestCase):
    def setUp(self):
        app.testing = True
        app.config['CATALOG'] = MemoryCompanyCatalog([])
        self.client = app.test_client()

    def tearDown(self):
        app.config.pop('CATALOG', None)

    def test_404_and_405(self):
        rv = self.client.get('/api/nope')
        self.assertEqual(rv.status_code, 404)
        self.assertEqual(rv.get_json(), {'error': 'Route not found'})
        rv2 = self.client.post('/api/search', json={'q': 'acme'})
        self.assertEqual(rv2.status_code, 405)
        self.assertEqual(rv2.get_json(), {'error': 'Method not allowed'})
        for send in (self.client.post, self.client.put, self.client.delete):
            rv3 = send('/api/nope')
            self.assertEqual(rv3.status_code, 405)
            self.assertEqual(rv3.get_json(), {'error': 'Method not allowed'})

    def test_cors_and_preflight(self):
        rv = self.client.options('/api/search')
        self.assertEqual(rv.status_code, 200)
        self.assertEqual(rv.headers['Access-Control-Allow-Origin'], '*')
        self.assertEqual(rv.headers['Access-Control-Allow-Methods'], 'GET, POST, OPTIONS')
        rv2 = self.client.get('/api/search?q=acme')
        self.assertEqual(rv2.headers['Access-Control-Allow-Headers'], 'Content-Type')
        self.assertEqual(rv2.get_json(), {'results': [], 'count': 0, 'query': 'acme'})
        rv3 = self.client.get('/missing')
        self.assertEqual(rv3.headers['Access-Control-Allow-Origin'], '*')


if __name__ == '__main__':
    unittest.main()
