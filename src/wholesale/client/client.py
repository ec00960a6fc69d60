"""Client aggregate.

Clients are maintained by an administrative process outside the rule engine;
the engine only reads them. The number of articles a client has ever ordered
is derived from order lines (see ``ClientRepository.ordered_quantity``) and is
never stored on the client.
"""

import sqlalchemy as sa
from protean.fields import String

from wholesale.domain import wholesale


@wholesale.aggregate
class Client:
    code = String(identifier=True, max_length=5)
    company = String(required=True, max_length=40)
    contact = String(max_length=30)
    address = String(max_length=255)


@wholesale.database_model(part_of=Client)
class ClientModel:
    # Client codes are assigned by the administration, not generated
    code = sa.Column(sa.String(5), primary_key=True)
