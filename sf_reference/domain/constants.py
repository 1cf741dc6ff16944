"""Source catalog conventions and storage layout constants."""

DOCS_BASE_URL = 'https://developer.salesforce.com/docs'

# Table of contents for one documentation set.
DOCUMENT_URL = '{base}/get_document/{documentation_id}'

# JSON envelope ({title, content}) for one page.
CONTENT_URL = '{base}/get_document_content/{deliverable}/{reference}/en-us/{doc_version}'

# Public page stored as an object's sourceUrl.
PUBLIC_URL = '{base}/{documentation_id}/{deliverable}/{reference}'

# Leaf ids that denote object reference pages.
ENTITY_PAGE_PREFIXES = ('sforce_api_objects_', 'tooling_api_objects_')

# Field table markers, tried in order.
SUMMARY_SELECTOR = '[id="summary"]'
FIELD_NAME_SELECTORS = ('[data-title="Field Name"]', '[data-title="Field"]')
DETAILS_SELECTOR = '[data-title="Details"]'

INDEX_FILE = 'index.json'
ERRORS_FILE = 'errors.json'
OBJECTS_DIR = 'objects'
FALLBACK_BUCKET = '_'
