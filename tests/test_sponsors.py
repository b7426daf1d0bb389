"""Sponsor CRUD, contract progress and renewal leads."""

from datetime import date

import pytest

from app.models.contact import Contact
from app.models.lead import Lead
from app.models.sponsor import Sponsor
from app.services.sponsor_service import (
    SponsorService,
    contract_progress,
    describe_contract,
    format_currency,
    is_expired,
    is_expiring_soon,
)


class TestContractMath:
    def test_progress_mid_term(self):
        progress = contract_progress(date(2024, 1, 1), date(2025, 1, 1), date(2024, 7, 1))
        assert round(progress) == 50
        assert progress == pytest.approx(182 / 366 * 100)

    def test_progress_clamped(self):
        assert contract_progress(date(2024, 1, 1), date(2025, 1, 1), date(2023, 6, 1)) == 0
        assert contract_progress(date(2024, 1, 1), date(2025, 1, 1), date(2026, 1, 1)) == 100

    def test_zero_length_contract(self):
        assert contract_progress(date(2024, 1, 1), date(2024, 1, 1), date(2024, 1, 1)) == 100
        assert contract_progress(date(2024, 1, 1), date(2024, 1, 1), date(2023, 12, 31)) == 0

    def test_expiring_window_inclusive(self):
        today = date(2024, 7, 1)
        assert is_expiring_soon(date(2024, 7, 1), today)
        assert is_expiring_soon(date(2024, 7, 31), today)
        assert not is_expiring_soon(date(2024, 8, 1), today)
        assert not is_expiring_soon(date(2024, 6, 30), today)

    def test_expired_only_while_active(self):
        today = date(2024, 7, 1)
        assert is_expired("active", date(2024, 6, 30), today)
        assert not is_expired("renewed", date(2024, 6, 30), today)
        assert not is_expired("active", date(2024, 7, 1), today)

    def test_describe_contract(self, make_sponsor):
        sponsor = make_sponsor(contract_end=date(2024, 7, 20))
        info = describe_contract(sponsor, date(2024, 7, 1))
        assert info.days_left == 19
        assert info.is_expiring_soon
        assert not info.is_expired

    def test_format_currency(self):
        assert format_currency(50000) == "$50,000"
        assert format_currency(None) == "-"


class TestSponsorApi:
    def test_create_defaults(self, client):
        response = client.post("/sponsors", json={
            "company": "Acme",
            "contract_start": "2024-01-01",
            "contract_end": "2025-01-01",
            "value": "50000",
            "notes": "Q3 newsletter slots",
        })
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "active"
        assert data["media_assets"] == ["Tokenized"]
        assert data["value"] == 50000
        assert data["notes"] == "Q3 newsletter slots"
        assert data["contact"]["name"] == "Acme"
        assert data["contact"]["notes"] is None
        assert set(data["contract"]) == {"progress", "days_left", "is_expiring_soon", "is_expired"}

    def test_contract_dates_required(self, client):
        response = client.post("/sponsors", json={"company": "Acme", "contract_start": "2024-01-01"})
        assert response.status_code == 400
        assert "error" in response.json()

    def test_end_before_start_rejected(self, client, db):
        response = client.post("/sponsors", json={
            "company": "Acme",
            "contract_start": "2024-06-01",
            "contract_end": "2024-01-01",
        })
        assert response.status_code == 400
        assert db.query(Sponsor).count() == 0

    def test_patch_checks_merged_dates(self, client, make_sponsor):
        sponsor = make_sponsor()
        response = client.patch(f"/sponsors/{sponsor.id}", json={"contract_end": "2023-01-01"})
        assert response.status_code == 400

    def test_list_sorted_by_contract_end_and_filtered(self, client, make_sponsor):
        make_sponsor(company="Late", contract_end=date(2025, 6, 1), media_assets=["Predicted"])
        make_sponsor(company="Early", contract_end=date(2024, 6, 1), media_assets=["Predicted", "Tokenized"])
        make_sponsor(company="Other", contract_end=date(2024, 3, 1))

        names = [s["contact"]["company"] for s in client.get("/sponsors").json()]
        assert names == ["Other", "Early", "Late"]

        names = [s["contact"]["company"] for s in client.get("/sponsors", params={"mediaAsset": "Predicted"}).json()]
        assert names == ["Early", "Late"]

    def test_contact_fields_nested_update(self, client, db, make_sponsor):
        sponsor = make_sponsor(company="Acme")
        response = client.patch(f"/sponsors/{sponsor.id}", json={"email": "ads@acme.com", "status": "renewed"})
        assert response.status_code == 200
        assert response.json()["status"] == "renewed"
        assert db.get(Contact, sponsor.contact_id).email == "ads@acme.com"

    def test_status_endpoint(self, client, make_sponsor):
        sponsor = make_sponsor()
        response = client.patch(f"/sponsors/{sponsor.id}/status", json={"status": "expired"})
        assert response.json()["status"] == "expired"

        response = client.patch(f"/sponsors/{sponsor.id}/status", json={"status": "cancelled"})
        assert response.status_code == 400

    def test_delete_cascades_to_contact(self, client, db, make_sponsor):
        sponsor = make_sponsor()
        other = make_sponsor(company="Globex")
        contact_id = sponsor.contact_id

        assert client.delete(f"/sponsors/{sponsor.id}").json() == {"success": True}
        assert db.get(Contact, contact_id) is None
        assert db.get(Contact, other.contact_id) is not None

    def test_missing_sponsor(self, client):
        assert client.get("/sponsors/42").status_code == 404
        assert client.delete("/sponsors/42").status_code == 404
        assert client.post("/sponsors/42/renewal-lead").json() == {"error": "Sponsor not found"}


class TestRenewalLead:
    def test_convert_to_lead(self, db, make_sponsor):
        sponsor = make_sponsor(
            name="Jane Doe",
            company="Acme",
            email="jane@acme.com",
            phone="555-0100",
            value=50000,
            media_assets=["Predicted"],
        )
        before = (sponsor.status, sponsor.value, sponsor.contract_end, sponsor.contact_id)

        lead = SponsorService(db).create_renewal_lead(sponsor.id, today=date(2024, 7, 1))

        assert lead.stage == "new"
        assert lead.source == "Renewal"
        assert lead.value == 50000
        assert lead.next_follow_up == date(2024, 7, 4)
        assert "$50,000" in lead.contact.notes
        assert lead.contact.name == "Jane Doe"
        assert lead.contact.email == "jane@acme.com"
        assert lead.contact_id != sponsor.contact_id
        assert list(lead.media_assets) == ["Predicted"]

        db.expire_all()
        sponsor = db.get(Sponsor, sponsor.id)
        assert (sponsor.status, sponsor.value, sponsor.contract_end, sponsor.contact_id) == before

    def test_renewal_endpoint(self, client, db, make_sponsor):
        sponsor = make_sponsor(value=50000)
        response = client.post(f"/sponsors/{sponsor.id}/renewal-lead")
        assert response.status_code == 200
        assert response.json()["source"] == "Renewal"
        assert db.query(Lead).count() == 1
        assert db.query(Sponsor).count() == 1
