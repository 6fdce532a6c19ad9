"""Console front end for libffx."""
