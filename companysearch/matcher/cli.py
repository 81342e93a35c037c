import json
import sys

from companysearch.catalog import CatalogUnavailable, open_catalog
from companysearch.config.env import configure_logging, get_catalog_config, get_server_config, load_env
from .core import build_response, search


def main():
    if len(sys.argv) < 2:
        print("Usage: python -m companysearch.matcher.cli <company name>")
        sys.exit(2)
    load_env()
    configure_logging(get_server_config().log_level, stream=sys.stderr)
    query = " ".join(sys.argv[1:])
    catalog = open_catalog(get_catalog_config())
    try:
        results = search(query, catalog)
    except CatalogUnavailable as e:
        print(f"Search failed: {e}", file=sys.stderr)
        sys.exit(1)
    print(json.dumps(build_response(query, results), indent=2, ensure_ascii=False))


if __name__ == "__main__":
    main()
