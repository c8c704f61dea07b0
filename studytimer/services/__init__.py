"""Services package: study-domain logic composed over the stores."""
