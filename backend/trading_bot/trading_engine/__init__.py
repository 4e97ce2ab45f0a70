"""
Trading Engine Module

Decision pipeline for the crossover trading bot:
- history: Rolling per-symbol price samples
- signal_detector: Crossover detection between two indicator pairs
- bot_state: Immutable engine configuration and per-symbol state table
- position_sizing: Buy/sell quantity calculation from free balances
- trading_bot: Orchestrator state machine (start/stop/tick/update_config)
- scheduler: Fixed-delay periodic trigger for tick()
"""
