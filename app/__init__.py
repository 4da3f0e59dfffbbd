"""
退火求解的“应用层”：配置、场景生成、后台调度与命令行入口。
"""
