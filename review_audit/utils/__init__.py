"""
Utility modules for ReviewAudit.

Cross-cutting helpers:
- CSV tokenizer: Delimiter detection and quote-aware row splitting
- Dates: Free-form date normalization
- Selection: Ranked top-k with backfill
- Storage: Report export
"""
