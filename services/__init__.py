"""
Service layer

Pure computation, no business state transitions:
- PricingService: board number validation and price table
- CalendarService: ISO weeks and the purchase cutoff
- ScoringService: winning rule and revenue split
- RoundSeeder: idempotent round pre-generation
"""
