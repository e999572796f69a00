"""
cg_market_data
~~~~~~~~~~~~~~

核心业务包：
- CoinGecko Pro API 数据抓取（区间查询 / 分页列表）
- 结果去重
- 本地 JSON / CSV 存储与路径管理

入口脚本位于 scripts/ 目录：
- market_chart_range.py
- coins_markets_all.py
"""
