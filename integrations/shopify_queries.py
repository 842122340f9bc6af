"""
Shopify Admin GraphQL documents used by ShopifyClient.
"""

GET_COLLECTION = """
query GetCollection($id: ID!) {
  collection(id: $id) {
    id
    title
    sortOrder
    productsCount {
      count
    }
  }
}
"""

GET_COLLECTION_PRODUCTS = """
query GetCollectionProducts($id: ID!, $first: Int!, $after: String) {
  collection(id: $id) {
    products(first: $first, after: $after) {
      edges {
        node {
          id
          title
          tags
          totalInventory
          createdAt
          publishedAt
          variants(first: 1) {
            edges {
              node {
                price
              }
            }
          }
        }
      }
      pageInfo {
        hasNextPage
        endCursor
      }
    }
  }
}
"""

GET_ORDERS_WITH_PRODUCTS = """
query GetOrdersWithProducts($first: Int!, $after: String, $query: String) {
  orders(first: $first, after: $after, query: $query) {
    edges {
      node {
        id
        createdAt
        lineItems(first: 100) {
          edges {
            node {
              product {
                id
              }
              quantity
              originalUnitPriceSet {
                shopMoney {
                  amount
                }
              }
              discountedUnitPriceSet {
                shopMoney {
                  amount
                }
              }
            }
          }
        }
      }
    }
    pageInfo {
      hasNextPage
      endCursor
    }
  }
}
"""

COLLECTION_REORDER_PRODUCTS = """
mutation collectionReorderProducts($id: ID!, $moves: [MoveInput!]!) {
  collectionReorderProducts(id: $id, moves: $moves) {
    job {
      id
      done
    }
    userErrors {
      field
      message
    }
  }
}
"""

GET_JOB_STATUS = """
query GetJobStatus($id: ID!) {
  job(id: $id) {
    id
    done
  }
}
"""

# Order search filters per OrdersRange value
ORDER_STATUS_FILTERS = {
    "all-orders": None,
    "paid-orders": "financial_status:paid",
    "fulfilled-orders": "fulfillment_status:fulfilled",
}
