"""keyhound - finds live AWS access keys leaked in git history.

keyhound walks every branch snapshot and every commit diff of a git
repository, extracts candidate access key / secret key pairs, and confirms
which pairs are still live by probing the AWS IAM identity API.
"""

__version__ = "1.0.0"
