"""Shared test fixtures."""

import json
from pathlib import Path

import pytest

from sf_reference.catalog.client import CatalogFetchError
from sf_reference.config import CloudConfig
from sf_reference.domain.models import CatalogDocument, EntityRecord, FieldSpec, LeafReference, RawPage


CORE_ID = 'atlas.en-us.object_reference.meta'
FSC_ID = 'atlas.en-us.financial_services_cloud_object_reference.meta'

TEST_CLOUDS = {
    CORE_ID: CloudConfig('Core Salesforce', 'Standard Salesforce objects.'),
    FSC_ID: CloudConfig('Financial Services Cloud', 'Objects for financial services.'),
}


# ── Sample page content ──────────────────────────────────────────────────

def field_table_html(summary: str, rows: list[tuple[str, str, str]], header: str = 'Field Name') -> str:
    """Build an object page with a field table using the given name header."""
    body = []
    for name, field_type, description in rows:
        body.append(f"""
      <tr>
        <td data-title="{header}"><span class="keyword">{name}</span></td>
        <td data-title="Details">
          <dl>
            <dt>Type</dt>
            <dd>{field_type}</dd>
            <dt>Properties</dt>
            <dd>Create, Filter, Group, Sort, Update</dd>
            <dt>Description</dt>
            <dd>{description}</dd>
          </dl>
        </td>
      </tr>""")
    return f"""
<div class="topic">
  <div id="summary"><p>{summary}</p></div>
  <table class="featureTable">
    <thead><tr><th>Field</th><th>Details</th></tr></thead>
    <tbody>{''.join(body)}
    </tbody>
  </table>
</div>
"""


ACCOUNT_ROWS = [
    ('Name', 'string', 'Required. Name of the account.'),
    ('Industry', 'picklist', 'An industry associated with this account.'),
    ('OwnerId', 'reference', 'The ID of the user who currently owns this account.'),
]

FINANCIAL_ACCOUNT_ROWS = [
    ('Balance', 'currency', 'The current balance.'),
    ('Status', 'picklist', 'The status of the financial account.'),
]


def toc_leaf(identifier: str, text: str, href: str) -> dict:
    return {'id': identifier, 'text': text, 'a_attr': {'href': href}}


# ── Fake catalog client ──────────────────────────────────────────────────

class FakeDocsClient:
    """In-memory stand-in for DocsClient.

    Args:
        documents: documentation id -> toc list.
        pages: href -> (title, html) or an Exception to raise.
    """

    def __init__(self, documents: dict[str, list], pages: dict[str, object]):
        self._documents = documents
        self._pages = pages
        self.requested: list[str] = []

    def get_document(self, documentation_id: str) -> CatalogDocument:
        if documentation_id not in self._documents:
            raise CatalogFetchError(f"HTTP error! status: 404 ({documentation_id})")
        return CatalogDocument(
            documentation_id=documentation_id,
            deliverable=documentation_id.split('.')[2],
            doc_version='264.0',
            toc=self._documents[documentation_id],
        )

    def get_content(self, leaf: LeafReference) -> RawPage:
        self.requested.append(leaf.reference)
        page = self._pages[leaf.reference]
        if isinstance(page, Exception):
            raise page
        title, html = page
        return RawPage(
            documentation_id=leaf.documentation_id,
            reference=leaf.reference,
            markup=html,
            title=title,
            deliverable=leaf.documentation_id.split('.')[2],
        )

    def close(self) -> None:
        pass


@pytest.fixture
def fake_catalog():
    """Two clouds sharing the Account object, documented differently."""
    documents = {
        CORE_ID: [
            {
                'id': 'sforce_api_objects_list',
                'text': 'Standard Objects',
                'children': [
                    toc_leaf('sforce_api_objects_account', 'Account', 'sforce_api_objects_account.htm'),
                    toc_leaf('sforce_api_objects_contact', 'Contact', 'sforce_api_objects_contact.htm'),
                ],
            },
        ],
        FSC_ID: [
            {
                'id': 'fsc_objects',
                'text': 'Objects',
                'children': [
                    toc_leaf('sforce_api_objects_financialaccount', 'FinancialAccount',
                             'sforce_api_objects_financialaccount.htm'),
                    toc_leaf('sforce_api_objects_account_fsc', 'Account', 'sforce_api_objects_account_fsc.htm'),
                ],
            },
        ],
    }
    pages = {
        'sforce_api_objects_account.htm': (
            'Account', field_table_html('Represents an individual account.', ACCOUNT_ROWS)),
        'sforce_api_objects_contact.htm': (
            'Contact', field_table_html('Represents a contact.', [('Email', 'email', 'The email.')])),
        'sforce_api_objects_financialaccount.htm': (
            'FinancialAccount', field_table_html('A financial account.', FINANCIAL_ACCOUNT_ROWS, header='Field')),
        'sforce_api_objects_account_fsc.htm': (
            'Account', field_table_html('Account as extended by FSC.', [('FinServ__Status__c', 'picklist', '')])),
    }
    return FakeDocsClient(documents, pages)


# ── Sample records and written data ──────────────────────────────────────

def make_record(name: str, cloud: str, clouds: list[str] | None = None,
                description: str = '', fields: list[str] | None = None) -> EntityRecord:
    return EntityRecord(
        name=name,
        description=description or f"{name} description",
        fields={f: FieldSpec(name=f, type='string', description=f"{f} field") for f in (fields or ['Id'])},
        cloud=cloud,
        clouds=clouds or [cloud],
        source_url=f"https://developer.salesforce.com/docs/{name}",
    )


@pytest.fixture
def sample_records():
    return [
        make_record('Account', 'Core Salesforce', ['Core Salesforce', 'Financial Services Cloud'],
                    description='Represents an individual account.', fields=['Name', 'Industry']),
        make_record('Contact', 'Core Salesforce'),
        make_record('FinancialAccount', 'Financial Services Cloud',
                    description='A financial account held by a customer.', fields=['Balance']),
        make_record('_TestObject', 'Core Salesforce'),
    ]


@pytest.fixture
def written_dir(tmp_path, sample_records):
    """Directory populated by the ShardWriter from sample_records."""
    from sf_reference.output.shard_writer import ShardWriter

    output_dir = tmp_path / "doc"
    ShardWriter(str(output_dir), clouds=TEST_CLOUDS).write(sample_records, version='264.0')
    return output_dir


def read_json(path):
    with open(path, encoding='utf-8') as f:
        return json.load(f)


@pytest.fixture
def test_clouds():
    return dict(TEST_CLOUDS)


@pytest.fixture
def page_html():
    """Factory: page_html(summary, rows, header='Field Name') -> html."""
    return field_table_html


@pytest.fixture
def record_factory():
    """Factory: record_factory(name, cloud, clouds=None, description='', fields=None)."""
    return make_record


@pytest.fixture
def load_json():
    return read_json


def file_bytes(output_dir) -> dict[str, bytes]:
    """Raw bytes of every file below output_dir, keyed by relative path.

    The ``generated`` line of index.json is dropped; it is the only value
    expected to differ between identical runs.
    """
    snapshot = {}
    for path in sorted(Path(output_dir).rglob('*')):
        if not path.is_file():
            continue
        content = path.read_bytes()
        if path.name == 'index.json':
            content = b''.join(line for line in content.splitlines(keepends=True)
                               if not line.lstrip().startswith(b'"generated"'))
        snapshot[path.relative_to(output_dir).as_posix()] = content
    return snapshot


@pytest.fixture
def snapshot_files():
    return file_bytes
