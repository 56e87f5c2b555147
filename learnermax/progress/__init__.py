"""Per-student course progress: lesson completion and last access."""
