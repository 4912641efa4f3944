"""
Exception hierarchy for the fundraiser toolkit.

Exception Categories:
- RetryableException: Transient failures that may succeed later (RPC, datastore)
- NonRetryableException: Permanent failures that won't change on a new attempt
- ConfigurationException: No contract/endpoint can be resolved for a campaign

Nothing in the toolkit retries automatically; the split tells callers which
failures are worth surfacing as "try again" and which are final.
"""


class RetryableException(Exception):
    """
    Base class for exceptions that may succeed on a later request.

    Use for transient failures like:
    - RPC timeouts
    - Datastore connectivity problems
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NonRetryableException(Exception):
    """
    Base class for exceptions that won't change on a later request.

    Use for permanent failures like:
    - Unknown campaign ids
    - Unsupported contract versions
    - Malformed on-chain return shapes
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationException(NonRetryableException):
    """
    No contract address, chain or decoder could be resolved.

    Fatal for a single-campaign request. List requests exclude the
    offending record instead of raising.
    """

    pass


class CampaignNotFoundException(NonRetryableException):
    """
    The campaign does not exist.

    Raised for single lookups when the contract reverts on getCampaign, or
    when neither the datastore nor the chain knows the id.
    """

    def __init__(self, campaign_id: int, message: str = ""):
        super().__init__(message or f"Campaign {campaign_id} not found")
        self.campaign_id = campaign_id


class DecoderException(NonRetryableException):
    """
    A raw getCampaign result could not be normalized.

    The on-chain reader converts this into a tagged failure so it never
    reaches callers.
    """

    pass


class OnchainReadException(RetryableException):
    """
    A single-campaign read failed and there is no cached record to fall
    back on.
    """

    pass


class DatastoreException(RetryableException):
    """
    The campaign datastore could not be queried.

    Fatal for the whole request: no partial results are returned.
    """

    pass
