"""Cross-cutting application plumbing: config, extensions, logging, errors."""
