"""MerchAI Studio: logo merchandise mockups with request governance."""
