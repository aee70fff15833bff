"""
Version Monitor - 版本滚动观测面板

负责：
- 高频轮询状态端点，提取版本/消息标签
- 在时间窗口内按标签计数（过期自动清理）
- 以较低频率在终端绘制柱状图
- 提供配套的状态端点服务（固定版本或 fortune 抽样）
"""

__version__ = "1.0.0"
