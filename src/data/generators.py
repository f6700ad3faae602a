"""
Demo Workspace Generator

Produces plausible analytics sources and saved reports for a user so that a
fresh dashboard has something to display. Credentials are fake
service-account payloads: the synthetic engine only checks they are present.
"""

import random
from datetime import date, timedelta
from typing import List, Optional

from faker import Faker

from src.analytics.catalog import DIMENSION_CATEGORIES, METRIC_SPECS
from src.analytics.schemas import ReportCreate, SourceCreate
from src.database.models import SyncFrequency

REPORT_TEMPLATES = [
    ("Daily traffic", ["activeUsers", "sessions"], ["date"]),
    ("Weekly engagement", ["pageviews", "avgSessionDuration"], ["date", "week"]),
    ("Traffic sources", ["sessions", "bounceRate"], ["source"]),
    ("Devices", ["activeUsers", "pagesPerSession"], ["device", "browser"]),
    ("Countries", ["newUsers", "conversionRate"], ["country"]),
]


class DemoWorkspaceGenerator:
    """Generate demo sources and reports"""

    def __init__(self, seed: Optional[int] = None):
        self.fake = Faker()
        self.rng = random.Random(seed)
        if seed is not None:
            self.fake.seed_instance(seed)

    def service_account(self, project: str) -> dict:
        """Fake service-account JSON in the shape Google issues it"""
        account = self.fake.user_name().replace(".", "-")
        return {
            "type": "service_account",
            "project_id": project,
            "private_key_id": self.fake.sha1(),
            "client_email": f"{account}@{project}.iam.gserviceaccount.com",
            "client_id": str(self.fake.random_number(digits=21, fix_len=True)),
        }

    def generate_sources(self, n: int = 2) -> List[SourceCreate]:
        sources = []
        for _ in range(n):
            domain = self.fake.domain_name()
            project = domain.split(".")[0].lower() + "-analytics"
            sources.append(
                SourceCreate(
                    name=domain,
                    property_id=str(self.fake.random_number(digits=9, fix_len=True)),
                    sync_frequency=self.rng.choice(list(SyncFrequency)),
                    credentials=self.service_account(project),
                )
            )
        return sources

    def generate_reports(
        self,
        source_ids: List[str],
        today: Optional[date] = None,
        per_source: int = 3,
    ) -> List[ReportCreate]:
        today = today or date.today()
        reports = []
        for source_id in source_ids:
            for name, metrics, dimensions in self.rng.sample(REPORT_TEMPLATES, k=min(per_source, len(REPORT_TEMPLATES))):
                span = self.rng.choice([7, 14, 30])
                filters = {}
                if self.rng.random() < 0.3:
                    filters["country"] = self.rng.choice(DIMENSION_CATEGORIES["country"])
                reports.append(
                    ReportCreate(
                        source_id=source_id,
                        name=name,
                        description=self.fake.sentence(nb_words=8),
                        start_date=today - timedelta(days=span),
                        end_date=today - timedelta(days=1),
                        metrics=[m for m in metrics if m in METRIC_SPECS],
                        dimensions=dimensions,
                        filters=filters,
                    )
                )
        return reports
