"""
数据模型定义

使用 Pydantic 定义状态端点响应与快照数据结构
"""

from typing import List

from pydantic import BaseModel, Field


class StatusResponse(BaseModel):
    """状态端点响应（轮询方与服务方共用的线上格式）"""
    hostname: str = Field(default="", description="服务主机名")
    message: str = Field(default="", description="版本/消息标签")


class HealthResponse(BaseModel):
    """健康检查响应"""
    status: str = Field(default="ok", description="健康状态")


class TagCount(BaseModel):
    """窗口内单个标签的计数"""
    tag: str = Field(..., description="标签")
    count: int = Field(..., ge=0, description="窗口内出现次数")


# 快照：按标签升序排列的计数列表
Snapshot = List[TagCount]
