"""
Agent implementations for ReviewAudit.

Contains the stages a review export passes through:
- Ingestion Agent (CSV parsing and record building)
- Column resolution (header detection, column roles)
- Temporal Aggregator (quarter/year metrics)
- Insight Agent (narrative insights)
"""
