# Models package - database models
from advocacy.models.advocate import Advocate
from advocacy.models.campaign import Campaign, CampaignType, CampaignStatus
from advocacy.models.campaign_action import CampaignAction
from advocacy.models.activity import ActivityLog, Actions
