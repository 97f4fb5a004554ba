"""Campaign endpoints: public browsing and the seller console."""

import typing as t

from marketplace.api.base import BaseAPI, unwrap
from marketplace.common.schema import query_params

from .schema import Campaign, CampaignFilters, CampaignInput, CampaignList, CampaignStatus, SellerCampaignFilters


class CampaignsAPI(BaseAPI):
    """Wraps the `/campaigns` endpoints."""

    async def get_campaigns(self, filters: CampaignFilters | None = None) -> CampaignList:
        """List public campaigns matching `filters`."""
        data = await self._get_data("/campaigns", params=query_params(filters))
        return CampaignList.model_validate(data)

    async def get_featured(self, limit: int = 10) -> list[Campaign]:
        data = await self._get_data("/campaigns/featured", params={"limit": limit})
        return CampaignList.model_validate(data).campaigns

    async def get_suggestions(self, query: str) -> list[str]:
        """Search-as-you-type suggestions for `query`."""
        data = await self._get_data("/campaigns/suggestions", params={"q": query})
        return list(data.get("suggestions") or [])

    async def get_campaign(self, campaign_id: str) -> Campaign:
        data = await self._get_data(f"/campaigns/{campaign_id}")
        return Campaign.model_validate(data["campaign"])

    # Seller only

    async def create_campaign(self, campaign_data: CampaignInput) -> Campaign:
        data = await self._post_data("/campaigns", campaign_data.to_payload())
        return Campaign.model_validate(data["campaign"])

    async def update_campaign(self, campaign_id: str, updates: CampaignInput) -> Campaign:
        """Apply a partial update; only the fields set on `updates` are sent."""
        payload = updates.model_dump(mode="json", by_alias=True, exclude_unset=True)
        data = unwrap(await self.client.put(f"/campaigns/{campaign_id}", payload))
        return Campaign.model_validate(data["campaign"])

    async def delete_campaign(self, campaign_id: str) -> dict[str, t.Any]:
        """Delete a campaign; returns the response envelope."""
        return t.cast(dict[str, t.Any], await self.client.delete(f"/campaigns/{campaign_id}"))

    async def get_my_campaigns(self, filters: SellerCampaignFilters | None = None) -> CampaignList:
        data = await self._get_data("/campaigns/seller/my-campaigns", params=query_params(filters))
        return CampaignList.model_validate(data)

    async def update_campaign_status(self, campaign_id: str, status: CampaignStatus) -> Campaign:
        data = unwrap(await self.client.patch(f"/campaigns/{campaign_id}/status", {"status": status.value}))
        return Campaign.model_validate(data["campaign"])
