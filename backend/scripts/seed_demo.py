import asyncio

from scrapgo.core.config import settings
from scrapgo.deps import build_repo
from scrapgo.services.identity import IdentityProvider
from scrapgo.services.lifecycle import PickupLifecycle

async def main():
    repo = build_repo(settings)
    await repo.open()
    try:
        customer = (await IdentityProvider(repo, settings, "seed-customer")
                    .authenticate("+15550000001", settings.demo_otp, "customer")).value
        partner = (await IdentityProvider(repo, settings, "seed-partner")
                   .authenticate("+15550000002", settings.demo_otp, "partner")).value
        lifecycle = PickupLifecycle(repo)

        # one pickup left open for partners, one walked through to completion
        await lifecycle.create(customer, address="42 Elm St", pickup_date="2025-06-02", time_slot="11:00 AM - 12:00 PM")
        done = (await lifecycle.create(customer, address="123 Main St", pickup_date="2025-06-01",
                                       time_slot="9:00 AM - 10:00 AM")).value
        accepted = (await lifecycle.accept(done.id, partner)).value
        await lifecycle.start(done.id, partner, accepted.pickup_code)
        await lifecycle.submit_items(done.id, partner, [{"name": "Copper Wire", "quantity": 3, "price": "2.50"}], "7.50")
        await lifecycle.approve(done.id, customer)
        print(f"Seeded {len(await repo.list_all())} pickups into {settings.store_backend} store")
        print("customer:", customer.id, "partner:", partner.id)
    finally:
        await repo.close()

if __name__ == "__main__":
    asyncio.run(main())
