"""
Typed async wrappers over the Readlater GraphQL API, for Python consumers
(the view-models, scripts, integration tests).
"""

from readlater.client.graphql import GraphQLClient, GraphQLRequestError
from readlater.client.highlights import (
    Highlight,
    MergeHighlightInput,
    MergeHighlightOutput,
    merge_highlight_mutation,
)
from readlater.client.subscriptions import (
    Subscription,
    SubscriptionStatus,
    SubscriptionsQuery,
    SubscriptionsQueryError,
    SubscriptionsQueryResponse,
    SubscriptionType,
)

__all__ = [
    "GraphQLClient",
    "GraphQLRequestError",
    "Highlight",
    "MergeHighlightInput",
    "MergeHighlightOutput",
    "merge_highlight_mutation",
    "Subscription",
    "SubscriptionStatus",
    "SubscriptionType",
    "SubscriptionsQuery",
    "SubscriptionsQueryError",
    "SubscriptionsQueryResponse",
]
