"""Cloud configuration and run defaults for the object reference scraper."""

import re
from dataclasses import dataclass

CHUNK_SIZE = 50
DEFAULT_VERSION = '264.0'
DEFAULT_ITEM_TIMEOUT = 30.0

DATA_DIR_ENV = 'SF_REFERENCE_DATA_DIR'


@dataclass(frozen=True)
class CloudConfig:
    """Display label and blurb for one documentation set."""

    label: str
    description: str = ''


# Processing order matters: the first cloud that documents an object owns
# its description and fields.
CONFIGURATION: dict[str, CloudConfig] = {
    'atlas.en-us.object_reference.meta': CloudConfig(
        'Core Salesforce',
        'Standard Salesforce objects including Account, Contact, Opportunity, Case, Lead, and other core CRM functionality.',
    ),
    'atlas.en-us.api_tooling.meta': CloudConfig(
        'Tooling API',
        'Salesforce Tooling API objects for metadata management, deployment, and development operations.',
    ),
    'atlas.en-us.api_metadata.meta': CloudConfig(
        'Metadata API',
        'Salesforce metadata types including ApexClass, CustomObject, Flow, and other components used in deployments and package development.',
    ),
    'atlas.en-us.salesforce_feedback_management_dev_guide.meta': CloudConfig(
        'Feedback Management',
        'Objects for collecting, managing, and analyzing customer feedback and survey responses.',
    ),
    'atlas.en-us.salesforce_scheduler_developer_guide.meta': CloudConfig(
        'Scheduler',
        'Objects for scheduling appointments, managing availability, and coordinating resources.',
    ),
    'atlas.en-us.field_service_dev.meta': CloudConfig(
        'Field Service Lightning',
        'Objects for managing field service operations, work orders, service appointments, and mobile workforce.',
    ),
    'atlas.en-us.loyalty.meta': CloudConfig(
        'Loyalty',
        'Objects for loyalty program management including member enrollment, points, rewards, and promotions.',
    ),
    'atlas.en-us.psc_api.meta': CloudConfig(
        'Public Sector Cloud',
        'Objects for government and public sector organizations including permits, inspections, and regulatory compliance.',
    ),
    'atlas.en-us.netzero_cloud_dev_guide.meta': CloudConfig(
        'Net Zero Cloud',
        'Objects for sustainability management, carbon accounting, emissions tracking, and environmental reporting.',
    ),
    'atlas.en-us.edu_cloud_dev_guide.meta': CloudConfig(
        'Education Cloud',
        'Objects for educational institutions including student recruitment, enrollment, academic programs, and alumni relations.',
    ),
    'atlas.en-us.automotive_cloud.meta': CloudConfig(
        'Automotive Cloud',
        'Objects for automotive industry including vehicle inventory, sales, service, warranties, and dealership management.',
    ),
    'atlas.en-us.eu_developer_guide.meta': CloudConfig(
        'Energy and Utilities Cloud',
        'Objects for energy and utility companies including meter management, billing, consumption tracking, and grid operations.',
    ),
    'atlas.en-us.health_cloud_object_reference.meta': CloudConfig(
        'Health Cloud',
        'Objects for healthcare and life sciences including patient care, clinical data, care plans, and health assessments.',
    ),
    'atlas.en-us.retail_api.meta': CloudConfig(
        'Consumer Goods Cloud',
        'Objects for consumer goods and retail including store operations, promotions, product assortment, and retail execution.',
    ),
    'atlas.en-us.financial_services_cloud_object_reference.meta': CloudConfig(
        'Financial Services Cloud',
        'Objects for financial services including banking, wealth management, insurance, client relationships, and financial accounts.',
    ),
    'atlas.en-us.mfg_api_devguide.meta': CloudConfig(
        'Manufacturing Cloud',
        'Objects for manufacturing operations including sales agreements, forecasting, production planning, and partner management.',
    ),
    'atlas.en-us.nonprofit_cloud.meta': CloudConfig(
        'Nonprofit Cloud',
        'Objects for nonprofit organizations including fundraising, donor management, grant tracking, and program management.',
    ),
    'atlas.en-us.revenue_lifecycle_management_dev_guide.meta': CloudConfig(
        'Revenue Lifecycle Management',
        'Objects for revenue lifecycle management including product configuration, pricing, billing, and revenue recognition.',
    ),
    'atlas.en-us.sales_cloud.meta': CloudConfig(
        'Sales Cloud',
        'Objects for sales operations including leads, opportunities, quotes, forecasts, and sales performance management.',
    ),
    'atlas.en-us.service_cloud.meta': CloudConfig(
        'Service Cloud',
        'Objects for customer service and support including cases, knowledge articles, service contracts, and omnichannel routing.',
    ),
}


def resolve_clouds(
    documentation_ids: list[str] | None = None,
    configuration: dict[str, CloudConfig] | None = None,
) -> dict[str, CloudConfig]:
    """Select clouds to process, keeping configuration order.

    Raises:
        ValueError: If a requested documentation id is not configured.
    """
    configuration = CONFIGURATION if configuration is None else configuration
    if not documentation_ids:
        return dict(configuration)
    unknown = [d for d in documentation_ids if d not in configuration]
    if unknown:
        raise ValueError(f"Unknown documentation ID(s): {', '.join(unknown)}")
    wanted = set(documentation_ids)
    return {doc_id: cfg for doc_id, cfg in configuration.items() if doc_id in wanted}


def cloud_by_label(label: str, configuration: dict[str, CloudConfig] | None = None) -> CloudConfig | None:
    configuration = CONFIGURATION if configuration is None else configuration
    for cfg in configuration.values():
        if cfg.label == label:
            return cfg
    return None


def cloud_file_name(label: str) -> str:
    """Convert a cloud label to its listing file stem.

    'Financial Services Cloud' -> 'financial-services-cloud'
    """
    return re.sub(r'[^a-z0-9-]', '', re.sub(r'\s+', '-', label.lower()))
