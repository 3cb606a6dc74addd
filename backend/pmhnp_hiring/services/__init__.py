"""
Services Layer

Normalization helpers and the pipeline services that fetch, clean,
deduplicate, store and maintain job listings. Import services from their
modules; aggregators depend on ``services.job_filter`` so this package
stays import-free.
"""
