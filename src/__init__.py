"""AWS Contact Queries: save and query contacts in a zoned DynamoDB record store."""
