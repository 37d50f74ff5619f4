"""
Pet Store - multi-tenant pet catalog with race-free order fulfillment

Merchants own one store each and list pets in it; customers buy up to ten
pets per order. It provides:
- Inventory ledger models and repositories (persistence)
- Order fulfillment engine and catalog services (services)
- Advisory Redis cache (cache)
- Field encryption for breeder emails (encryption)
- HTTP API (api) and admin CLI (cli)

The ledger is authoritative. Nothing reads availability from the cache to
decide whether a pet may be sold.
"""
