# app/integrations/shopify/queries.py
# Admin GraphQL documents used by the quote and order services.

# =====================================================
# CUSTOMERS
# =====================================================
GET_CUSTOMER_EMAIL = """
query getCustomerEmailById($customerId: ID!) {
  customer(id: $customerId) {
    email
    phone
    companyContactProfiles {
      id
      company {
        id
        name
      }
    }
  }
}
"""

SEARCH_CUSTOMERS = """
query SearchCustomers($query: String!) {
  customers(first: 250, query: $query) {
    edges {
      node {
        id
      }
    }
  }
}
"""

BATCH_GET_CUSTOMERS = """
query BatchGetCustomers($ids: [ID!]!) {
  nodes(ids: $ids) {
    ... on Customer {
      id
      firstName
      lastName
      email
      phone
      state
    }
  }
}
"""

# =====================================================
# COMPANY LOCATIONS
# =====================================================
_ADDRESS_FIELDS = """
      firstName
      lastName
      address1
      address2
      city
      companyName
      country
      countryCode
      province
      zoneCode
      zip
      phone
"""

GET_COMPANY_LOCATION_BUYER_CONFIG = """
query CompanyLocationBuyerConfig($companyLocationId: ID!) {
  companyLocation(id: $companyLocationId) {
    id
    buyerExperienceConfiguration {
      checkoutToDraft
      editableShippingAddress
      payNowOnly
      paymentTermsTemplate {
        id
        name
        paymentTermsType
        dueInDays
      }
    }
  }
}
"""

GET_COMPANY_LOCATION_ADDRESS = (
    """
query getCompanyLocationByLocationId($companyLocationId: ID!) {
  companyLocation(id: $companyLocationId) {
    id
    name
    billingAddress {"""
    + _ADDRESS_FIELDS
    + """    }
    shippingAddress {"""
    + _ADDRESS_FIELDS
    + """    }
  }
}
"""
)

BATCH_GET_COMPANY_LOCATIONS = (
    """
query GetCompanyLocations($companyLocationIds: [ID!]!) {
  nodes(ids: $companyLocationIds) {
    ... on CompanyLocation {
      id
      name
      company {
        id
        name
      }
      shippingAddress {"""
    + _ADDRESS_FIELDS
    + """      }
      billingAddress {"""
    + _ADDRESS_FIELDS
    + """      }
    }
  }
}
"""
)

# =====================================================
# PRODUCT VARIANTS
# =====================================================
BATCH_GET_VARIANT_PRICES = """
query GetVariantPrices($variantIds: [ID!]!, $companyLocationId: ID!) {
  nodes(ids: $variantIds) {
    ... on ProductVariant {
      id
      title
      sku
      inventoryQuantity
      metafield(key: "custom_uom", namespace: "$app:custom") {
        value
      }
      contextualPricing(context: { companyLocationId: $companyLocationId }) {
        price {
          amount
          currencyCode
        }
        quantityRule {
          minimum
          maximum
          increment
        }
      }
      image {
        id
        url
        altText
      }
      product {
        id
        title
        handle
        images(first: 10) {
          nodes {
            id
            url
          }
        }
      }
    }
  }
}
"""

# =====================================================
# ORDERS
# =====================================================
DRAFT_ORDER_CREATE = """
mutation draftOrderCreate($input: DraftOrderInput!) {
  draftOrderCreate(input: $input) {
    draftOrder {
      id
    }
    userErrors {
      field
      message
    }
  }
}
"""

ORDER_CREATE = """
mutation orderCreate($order: OrderCreateOrderInput!) {
  orderCreate(order: $order) {
    order {
      id
    }
    userErrors {
      field
      message
    }
  }
}
"""
