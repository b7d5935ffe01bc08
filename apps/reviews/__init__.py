"""Reviews of completed stays and the ratings derived from them."""
