"""Cross-cutting application plumbing: config, logging, errors, extensions."""
