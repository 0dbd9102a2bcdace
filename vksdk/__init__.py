"""
vksdk - install the LunarG Vulkan SDK in CI pipelines.
"""
