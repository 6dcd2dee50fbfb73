from journey.certificates.engine import CertificateEngine, Eligibility

__all__ = ["CertificateEngine", "Eligibility"]
