"""
Component tests for the campaign registry.
"""
import uuid
from datetime import datetime

import pytest

from advocacy.core.exceptions import NotFoundError, ValidationError
from advocacy.models.activity import Actions
from advocacy.models.campaign import CampaignStatus
from advocacy.repositories.action_repo import CampaignActionRepository
from advocacy.repositories.activity_repo import ActivityLogRepository
from advocacy.schemas.campaign import CampaignUpdate, Recipient
from advocacy.services.campaign_service import CampaignService
from tests.fixtures import make_campaign_data, make_recipients

pytestmark = pytest.mark.component


class TestCampaignCreate:

    @pytest.mark.asyncio
    async def test_create_sets_links_and_status(self, session):
        # Given: a valid campaign payload
        data = make_campaign_data()

        # When: creating the campaign
        campaign = await CampaignService(session).create(data)

        # Then: it is active and its share link and QR code reference its id
        assert campaign.status == CampaignStatus.ACTIVE
        assert campaign.max_recipients == 200
        assert campaign.reactivation_fee_paid is False
        assert campaign.campaign_url.endswith(f"/campaign/{campaign.id}")
        assert str(campaign.id) in campaign.qr_code_url
        assert campaign.recipient_list == data["recipient_list"]

    @pytest.mark.asyncio
    async def test_create_logs_activity(self, session):
        campaign = await CampaignService(session).create(make_campaign_data())

        logs = await ActivityLogRepository(session).get_by_entity("campaign", campaign.id)

        assert [log.action for log in logs] == [Actions.CAMPAIGN_CREATED]
        assert logs[0].actor_id == campaign.organizer_id

    @pytest.mark.asyncio
    async def test_exactly_200_recipients_allowed(self, session):
        campaign = await CampaignService(session).create(make_campaign_data(recipient_list=make_recipients(200)))

        assert len(campaign.recipient_list) == 200

    @pytest.mark.asyncio
    async def test_201_recipients_rejected(self, session):
        with pytest.raises(ValidationError) as exc:
            await CampaignService(session).create(make_campaign_data(recipient_list=make_recipients(201)))

        assert exc.value.message == "Recipient list cannot exceed 200 emails"

    @pytest.mark.asyncio
    async def test_blank_title_rejected(self, session):
        with pytest.raises(ValidationError) as exc:
            await CampaignService(session).create(make_campaign_data(title=""))

        assert exc.value.message == "Missing required fields"

    @pytest.mark.asyncio
    async def test_missing_field_rejected(self, session):
        data = make_campaign_data()
        del data["email_body"]

        with pytest.raises(ValidationError) as exc:
            await CampaignService(session).create(data)

        assert "email_body" in exc.value.message

    @pytest.mark.asyncio
    async def test_unknown_campaign_type_rejected(self, session):
        with pytest.raises(ValidationError):
            await CampaignService(session).create(make_campaign_data(campaign_type="lifetime"))

    @pytest.mark.asyncio
    async def test_empty_recipient_list_allowed(self, session):
        campaign = await CampaignService(session).create(make_campaign_data(recipient_list=[]))

        assert campaign.recipient_list == []


class TestCampaignRead:

    @pytest.mark.asyncio
    async def test_get_absent_returns_none(self, session):
        assert await CampaignService(session).get(uuid.uuid4()) is None

    @pytest.mark.asyncio
    async def test_list_filters_by_organizer(self, session):
        service = CampaignService(session)
        organizer_id = uuid.uuid4()
        mine = await service.create(make_campaign_data(organizer_id=str(organizer_id)))
        await service.create(make_campaign_data())

        campaigns = await service.list(organizer_id)

        assert [c.id for c in campaigns] == [mine.id]
        assert len(await service.list()) == 2


class TestCampaignUpdate:

    @pytest.mark.asyncio
    async def test_partial_update_keeps_other_fields(self, session, campaign):
        service = CampaignService(session)

        updated = await service.update(campaign.id, {"title": "Save the branch library"})

        assert updated.title == "Save the branch library"
        assert updated.email_subject == campaign.email_subject
        assert updated.updated_at >= updated.created_at

    @pytest.mark.asyncio
    async def test_typed_update(self, session, campaign):
        updated = await CampaignService(session).update(
            campaign.id, CampaignUpdate(recipient_list=[Recipient(email="new@gov.example")])
        )

        assert updated.recipient_list == [{"name": None, "email": "new@gov.example"}]

    @pytest.mark.asyncio
    async def test_status_can_be_deactivated(self, session, campaign):
        updated = await CampaignService(session).update(campaign.id, {"status": "inactive"})

        assert updated.status == CampaignStatus.INACTIVE

    @pytest.mark.asyncio
    async def test_expires_at_can_be_cleared(self, session):
        campaign = await CampaignService(session).create(
            make_campaign_data(expires_at="2030-01-01T00:00:00")
        )

        updated = await CampaignService(session).update(campaign.id, {"expires_at": None})

        assert updated.expires_at is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("patch", [{"id": str(uuid.uuid4())}, {"created_at": "2020-01-01T00:00:00"}])
    async def test_immutable_fields_rejected(self, session, campaign, patch):
        with pytest.raises(ValidationError):
            await CampaignService(session).update(campaign.id, patch)

    @pytest.mark.asyncio
    async def test_empty_patch_rejected(self, session, campaign):
        with pytest.raises(ValidationError) as exc:
            await CampaignService(session).update(campaign.id, {})

        assert exc.value.message == "No fields to update"

    @pytest.mark.asyncio
    async def test_clearing_required_field_rejected(self, session, campaign):
        with pytest.raises(ValidationError):
            await CampaignService(session).update(campaign.id, {"title": None})

    @pytest.mark.asyncio
    async def test_recipient_cap_enforced(self, session, campaign):
        with pytest.raises(ValidationError):
            await CampaignService(session).update(campaign.id, {"recipient_list": make_recipients(201)})

    @pytest.mark.asyncio
    async def test_max_recipients_can_be_lowered(self, session, campaign):
        updated = await CampaignService(session).update(campaign.id, {"max_recipients": 50})

        assert updated.max_recipients == 50

    @pytest.mark.asyncio
    @pytest.mark.parametrize("cap", [0, 201, 10000])
    async def test_max_recipients_out_of_range(self, session, campaign, cap):
        with pytest.raises(ValidationError) as exc:
            await CampaignService(session).update(campaign.id, {"max_recipients": cap})

        assert exc.value.message == "Validation failed for field 'max_recipients': must be between 1 and 200"
        assert (await CampaignService(session).get(campaign.id)).max_recipients == 200

    @pytest.mark.asyncio
    async def test_max_recipients_below_current_list(self, session):
        # Given: a campaign with three recipients
        service = CampaignService(session)
        campaign = await service.create(make_campaign_data(recipient_list=make_recipients(3)))

        # When: capping it below the list length
        with pytest.raises(ValidationError) as exc:
            await service.update(campaign.id, {"max_recipients": 2})

        # Then: the cap is unchanged
        assert exc.value.message == (
            "Validation failed for field 'max_recipients': cannot be below the 3 listed recipients"
        )
        assert (await service.get(campaign.id)).max_recipients == 200

    @pytest.mark.asyncio
    async def test_max_recipients_checked_against_new_list(self, session):
        service = CampaignService(session)
        campaign = await service.create(make_campaign_data(recipient_list=make_recipients(3)))

        updated = await service.update(
            campaign.id, {"max_recipients": 2, "recipient_list": make_recipients(2)}
        )

        assert updated.max_recipients == 2
        assert len(updated.recipient_list) == 2

    @pytest.mark.asyncio
    async def test_recipient_list_respects_lowered_cap(self, session, campaign):
        service = CampaignService(session)
        await service.update(campaign.id, {"max_recipients": 2})

        with pytest.raises(ValidationError) as exc:
            await service.update(campaign.id, {"recipient_list": make_recipients(3)})

        assert exc.value.message == "Recipient list cannot exceed 2 emails"

    @pytest.mark.asyncio
    async def test_unknown_status_rejected(self, session, campaign):
        with pytest.raises(ValidationError):
            await CampaignService(session).update(campaign.id, {"status": "archived"})

    @pytest.mark.asyncio
    async def test_absent_campaign(self, session):
        with pytest.raises(NotFoundError):
            await CampaignService(session).update(uuid.uuid4(), {"title": "Nothing here"})


class TestCampaignDelete:

    @pytest.mark.asyncio
    async def test_delete_removes_actions(self, session, campaign, advocate):
        # Given: a campaign with recorded outreach
        await CampaignActionRepository(session).record(
            campaign_id=campaign.id, advocate_id=advocate.id, email_sent=True,
            sent_at=datetime.utcnow(), recipient_email="jane.doe@gov.example"
        )

        # When: deleting it
        deleted = await CampaignService(session).delete(campaign.id)

        # Then: the campaign and its actions are gone
        assert deleted is True
        assert await CampaignService(session).get(campaign.id) is None
        assert await CampaignActionRepository(session).list_by_campaign(campaign.id) == []

    @pytest.mark.asyncio
    async def test_delete_absent_is_noop(self, session):
        assert await CampaignService(session).delete(uuid.uuid4()) is False
