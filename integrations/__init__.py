"""
External catalog integrations.

CatalogClient is the interface the resort engine depends on;
ShopifyClient implements it over the Admin GraphQL API.
"""
