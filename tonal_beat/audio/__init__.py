"""Audio inputs and the services that analyze them."""
