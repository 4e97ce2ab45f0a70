"""API routers for the trading bot control surface"""
