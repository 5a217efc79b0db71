"""Zone setup, writes, reads and the view model over them."""

from .zone_provisioner import ZoneProvisioner
from .contact_writer import ContactWriter
from .contact_query import ContactQuery
from .view_model import ContactsViewModel

__all__ = ["ZoneProvisioner", "ContactWriter", "ContactQuery", "ContactsViewModel"]
