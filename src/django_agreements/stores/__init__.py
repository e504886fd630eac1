"""Agreement store backends.

    base.AgreementStore           interface every backend implements
    orm.DjangoAgreementStore      Django ORM tables (default)
    memory.InMemoryAgreementStore process-local dict, for tests and demos

The active backend is chosen by the AGREEMENTS_STORE setting, see
django_agreements.conf.get_store().
"""
