# =============================
# GLSL Шейдеры
# =============================

TERRAIN_VERTEX_SHADER = """
#version 330

in vec3 in_position;
in vec3 in_normal;

out vec3 v_normal;
out float v_height;

uniform mat4 mvp;
uniform float height_min;
uniform float height_max;

void main() {
    gl_Position = mvp * vec4(in_position, 1.0);
    v_normal = in_normal;
    v_height = clamp((in_position.z - height_min)
                     / max(height_max - height_min, 1e-6), 0.0, 1.0);
}
"""

TERRAIN_FRAGMENT_SHADER = """
#version 330

in vec3 v_normal;
in float v_height;

out vec4 f_color;

uniform vec3 light_dir;
uniform float ambient;

// valley → slope → peak
vec3 height_tint(float h) {
    vec3 low = vec3(0.18, 0.36, 0.16);
    vec3 mid = vec3(0.48, 0.40, 0.28);
    vec3 high = vec3(0.92, 0.92, 0.95);
    return h < 0.6 ? mix(low, mid, h / 0.6) : mix(mid, high, (h - 0.6) / 0.4);
}

void main() {
    float diffuse = max(dot(normalize(v_normal), normalize(light_dir)), 0.0);
    f_color = vec4(height_tint(v_height) * (ambient + (1.0 - ambient) * diffuse), 1.0);
}
"""

# Small cross at the manipulator pivot
PIVOT_VERTEX_SHADER = """
#version 330

in vec3 in_position;

uniform mat4 mvp;

void main() {
    gl_Position = mvp * vec4(in_position, 1.0);
}
"""

PIVOT_FRAGMENT_SHADER = """
#version 330

out vec4 f_color;

uniform vec3 color;

void main() {
    f_color = vec4(color, 1.0);
}
"""
