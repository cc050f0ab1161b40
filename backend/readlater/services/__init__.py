"""
Readlater Backend — Services Layer
====================================

Service Inventory:
    - RuleService:          find-or-create, list and delete rules
    - DeviceTokenService:   push device tokens (+ analytics)
    - LibraryItemService:   item updates and following-feed ingestion
    - AnalyticsClient:      fire-and-forget track events

Every service method is one TransactionManager.run() scoped to the owner.
Services raise ReadlaterError subclasses; routes and resolvers translate.
"""
