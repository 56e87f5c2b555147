"""Course enrollment: records, the access gate and enrollment strategies."""
