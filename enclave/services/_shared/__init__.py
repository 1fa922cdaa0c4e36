"""Building blocks shared by every service: base class, DTOs, errors, ports."""
