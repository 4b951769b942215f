from django.db import models

# -----------------------------------------
# Enforce tenant scoping across all models
# that belong to an organization
# -----------------------------------------
class OrgQuerySet(models.QuerySet):
    def for_org(self, org):         # Add queryset helper
        return self.filter(org=org) # Apply filter

    # Enables query:
    # Account.objects.for_org(request.org).filter(is_postable=True)


class OrgManager(models.Manager):
    def get_queryset(self): # every model gets OrgQuerySet (so .for_org() is always available)
        return OrgQuerySet(self.model, using=self._db)

    def for_org(self, org): # can call for_org() directly on objects
        return self.get_queryset().for_org(org)


# Journal lines are only ever aggregated through their (posted) journal
class JournalLineQuerySet(OrgQuerySet):
    def posted(self):
        return self.filter(journal__posted=True)

    def in_period(self, period):
        return self.filter(journal__period=period)

    def excluding_closing(self):
        # closing entries zero out income/expense; P&L must not see them
        return self.filter(journal__is_closing=False)


class JournalLineManager(OrgManager):
    def get_queryset(self):
        return JournalLineQuerySet(self.model, using=self._db)

    def posted(self):
        return self.get_queryset().posted()
